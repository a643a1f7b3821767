"""smtp-infra — resolve, validate, and compose SMTP server deployments."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
