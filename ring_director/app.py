import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ring_director.config import DirectorConfig, load_config
from ring_director.engine import Promotion
from ring_director.llm import LLM, HttpLLM
from ring_director.pipeline.orchestrator import LogPublisher, Pacing, Publisher, Show
from ring_director.routes import router

logger = logging.getLogger(__name__)


def create_app(
    promotion: Promotion | None = None,
    llm: LLM | None = None,
    publisher: Publisher | None = None,
    config: DirectorConfig | None = None,
) -> FastAPI:
    config = config or load_config()
    if promotion is None:
        promotion = Promotion(state_dir=config.state_dir)
        promotion.load()

    show = Show(
        promotion=promotion,
        llm=llm or HttpLLM(config.llm_url, config.llm_model, config.llm_format),
        publisher=publisher or LogPublisher(),
        pacing=Pacing(
            response_delay_ms=config.response_delay_ms,
            typing_delay_per_char_ms=config.typing_delay_per_char_ms,
            max_response_length=config.max_response_length,
            between_rounds_ms=config.response_delay_ms // 2,
        ),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        stop = asyncio.Event()
        promos = asyncio.create_task(show.promo_loop(config.promo_interval_minutes, stop))
        try:
            yield
        finally:
            stop.set()
            promos.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await promos
            promotion.close()
            logger.info("Storyline state saved on shutdown")

    app = FastAPI(title="Ring Director", lifespan=lifespan)
    app.state.show = show
    app.state.config = config
    app.include_router(router, prefix="/api")
    return app
