class BiBrowserError(Exception):
    """Base exception for all bi_browser errors"""
    pass

class ConfigError(BiBrowserError):
    """Invalid or inconsistent global.json or dataset config"""
    pass

class DatasetSchemaError(BiBrowserError):
    """
    Dataset payload doesn't match what Dataset expects:
    rows that are not objects, field metadata naming unknown types, etc
    """
    pass
