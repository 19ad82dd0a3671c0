"""
Service information routes for the n-gram analyzer.
"""

from .app_state import SERVICE_NAME, SERVICE_VERSION, app, config


@app.get("/")
async def service_info():
    """Describe the service and its effective limits"""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": ["/analysis/ngrams", "/analysis/health"],
        "limits": {
            "max_ngram_size": config.MAX_NGRAM_SIZE,
            "max_text_chars": config.MAX_TEXT_CHARS,
        },
        "defaults": {
            "sizes": config.default_sizes,
            "min_count": config.DEFAULT_MIN_COUNT,
        },
    }
