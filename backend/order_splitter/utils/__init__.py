from order_splitter.utils.validators import validate_url, clean_text, name_key

__all__ = ["validate_url", "clean_text", "name_key"]
