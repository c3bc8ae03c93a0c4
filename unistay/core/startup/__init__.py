# =============================================================================
# File: unistay/core/startup/__init__.py
# Description: Startup phases used by unistay.core.lifespan
# =============================================================================
