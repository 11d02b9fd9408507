from typing import Mapping, Optional


def extract_ip_address(headers: Mapping[str, str]) -> Optional[str]:
    """
    Best-effort client IP from proxy headers.

    Checks, in order:
    1. x-forwarded-for (first entry of the comma-separated chain)
    2. x-real-ip
    3. x-vercel-forwarded-for
    Returns None when none are present.
    """
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip

    vercel_ip = headers.get("x-vercel-forwarded-for")
    if vercel_ip:
        return vercel_ip

    return None
