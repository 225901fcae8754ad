"""Allow ``python -m cert_renewal_manager``."""

from cert_renewal_manager.cli.main import app

app(prog_name="certctl")
