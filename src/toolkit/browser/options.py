"""Chrome options for the standalone-chrome sidecar."""

from selenium.webdriver.chrome.options import Options as ChromeOptions

CHROME_ARGUMENTS = (
    "--headless=new",
    "--ignore-certificate-errors",
    "--no-sandbox",
    "--disable-gpu",
    "--disable-dev-shm-usage",
)


def chrome_options() -> ChromeOptions:
    """Headless Chrome that tolerates self-signed certificates.

    ``--disable-dev-shm-usage`` keeps Chrome off ``/dev/shm`` even though
    the compose file gives the sidecar a 2g shared-memory segment; both
    are needed for large pages.
    """
    options = ChromeOptions()
    for argument in CHROME_ARGUMENTS:
        options.add_argument(argument)
    options.accept_insecure_certs = True
    return options
