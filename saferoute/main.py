"""
SafeRoute Backend — FastAPI
Modular entry point. All logic is split across:
  config.py, models.py, geo.py, polyline.py, hazards.py, scoring.py,
  data_fetchers.py, route_source.py, mock_routes.py, pipeline.py, store.py, routes.py
"""

import logging

logging.basicConfig(level=logging.INFO)

from saferoute.routes import app  # noqa: F401,E402

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
