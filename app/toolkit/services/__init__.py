from toolkit.services.email import EmailService

__all__ = ["EmailService"]
