from tradeshield.schemas.analyze_schemas import Platform


def detect_platform(url: str) -> Platform:
    """
    Coarse source-site classification by substring match.

    Not a URL parser: "x.com" matches anywhere in the string, so hosts such
    as "box.com" also classify as twitter.
    """
    url_lower = url.lower()
    if "twitter.com" in url_lower or "x.com" in url_lower:
        return "twitter"
    if "instagram.com" in url_lower:
        return "instagram"
    return "unknown"
