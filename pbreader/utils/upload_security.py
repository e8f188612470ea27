ALLOWED_EXTENSIONS = {".pb"}

# Tab, LF and CR are the only control characters a PB file uses
TEXT_CONTROLS = frozenset(b"\t\n\r")


def is_allowed_extension(filename: str) -> bool:
    name = (filename or "").lower().strip()
    return any(name.endswith(ext) for ext in ALLOWED_EXTENSIONS)


def is_probably_text_bytes(data: bytes, max_control_ratio: float = 0.01) -> bool:
    """Cheap screen run before decoding an upload.

    A NUL byte rejects the sample outright. Bytes from 0x80 up are left to the
    UTF-8 decoder, which is the stricter check.
    """
    if b"\x00" in data:
        return False
    if not data:
        return True
    controls = sum(1 for ch in data if ch < 0x20 and ch not in TEXT_CONTROLS)
    return controls / len(data) <= max_control_ratio
