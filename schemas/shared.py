def clean_text(v) -> str:
    """Normalise a raw form value: None becomes empty, whitespace is trimmed"""
    if v is None:
        return ""
    return str(v).strip()


def raw_text(v) -> str:
    """Like clean_text but keeps surrounding whitespace (passwords)"""
    if v is None:
        return ""
    return str(v)
