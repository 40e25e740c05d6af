"""ClaimLink: federated-login registration and account-linking handler."""

__version__ = "0.1.0"
