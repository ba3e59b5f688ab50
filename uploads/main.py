"""robyn-uploads - upload normalization served by Robyn."""

from robyn import Robyn

from uploads.api.files import router as files_router
from uploads.api.health import router as health_router
from uploads.core.lifespan import create_lifespan
from uploads.core.logger import logger
from uploads.core.settings import settings as st
from uploads.events.staging import UploadStagingEvent

app = Robyn(__file__)

# Lifespan events
lifespan = create_lifespan(app)
lifespan.register(UploadStagingEvent)

app.startup_handler(lifespan.startup)
app.shutdown_handler(lifespan.shutdown)

# Routers
app.include_router(health_router)
app.include_router(files_router)


def main() -> None:
    logger.info("🚀 STARTING %s | HOST=%s | PORT=%s", st.API_NAME, st.API_HOST, st.API_PORT)
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
