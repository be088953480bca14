import logging

import uvicorn
from kitchen.api.api_run import app
from kitchen.utilities.config import APP_HOST, APP_PORT, LOG_LEVEL


if __name__ == "__main__":
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("kitchen_app").info("Kitchen rotation API on http://localhost:%s", APP_PORT)
    uvicorn.run(app, host=APP_HOST, port=APP_PORT)
