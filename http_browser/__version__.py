__title__ = "http-browser"
__description__ = "Stateful HTTP session that keeps cookies and follows redirects like a browser."
__version__ = "1.0.0"
