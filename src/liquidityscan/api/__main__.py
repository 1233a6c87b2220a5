"""Allow running the API as: python -m liquidityscan.api [--config path]."""

from liquidityscan.api.runner import main

main()
