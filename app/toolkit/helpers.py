"""
Helpers for keeping personal data out of logs.

Usage:
    from toolkit.helpers import mask_email, mask_recipients

    logger.info("Email sent", extra={"to": mask_recipients(to)})
"""


def mask_email(email: str) -> str:
    """
    Mask an email address, keeping the first character and the domain.

    Example:
        mask_email("john.doe@example.com")  # "j***@example.com"
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.rsplit("@", 1)
    masked_local = local[0] + "***" if len(local) > 1 else "***"
    return f"{masked_local}@{domain}"


def mask_recipients(to: str | list[str]) -> list[str]:
    if isinstance(to, str):
        to = [to]
    return [mask_email(address) for address in to]
