"""Allow ``python -m workforce_forecast``."""

from workforce_forecast.main import main

main()
