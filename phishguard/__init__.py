from .service import analyze_url

__all__ = ["analyze_url"]
