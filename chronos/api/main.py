import asyncio
import time
import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import os

from chronos.feeds import GeminiNewsFeed
from chronos.notifier.x_publisher import publisher_from_env
from chronos.storage.models import AppConfig, NewsTopic, INTERVAL_OPTIONS
from chronos.tracker.update_cycle import UpdateCycleController
from chronos.utils.geo import get_current_location

# Carrega variáveis do .env
load_dotenv(override=True)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

DEFAULT_TOPIC = os.getenv("CHRONOS_DEFAULT_TOPIC", NewsTopic.tech.value)
DEFAULT_INTERVAL_MINUTES = int(os.getenv("CHRONOS_INTERVAL_MINUTES", "60"))
TICK_SECONDS = 1  # resolução do countdown


def build_controller() -> UpdateCycleController:
    config = AppConfig(topic=DEFAULT_TOPIC, update_interval_minutes=DEFAULT_INTERVAL_MINUTES)
    return UpdateCycleController(
        feed=GeminiNewsFeed(),
        publisher=publisher_from_env(),
        config=config,
        location_provider=get_current_location,
    )


controller = build_controller()

# Scheduler com configurações para evitar empilhamento de ticks
scheduler = AsyncIOScheduler(
    job_defaults={
        "coalesce": True,
        "max_instances": 1,
        "misfire_grace_time": 5,
    }
)
# ticks pulados durante um fetch são esperados
logging.getLogger("apscheduler").setLevel(logging.ERROR)


async def countdown_tick():
    await controller.tick(TICK_SECONDS)


# lookup de localização roda em paralelo ao primeiro ciclo
location_task = None


async def warm_up():
    global location_task
    location_task = asyncio.create_task(controller.acquire_location())
    await controller.trigger_update()


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler.add_job(countdown_tick, "interval", seconds=TICK_SECONDS, id="countdown")
    scheduler.start()

    # Primeira execução imediata
    try:
        await warm_up()
    except Exception as e:
        logger.warning("first update failed: %s", e)

    yield
    scheduler.shutdown(wait=False)
    if location_task is not None and not location_task.done():
        location_task.cancel()


def _state():
    return controller.snapshot().model_dump(mode="json")

#%% APP

app = FastAPI(title="Chronos", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=512)

@app.get("/health")
def health():
    return {"status": "ok", "ts": int(time.time())}

@app.get("/state")
def get_state():
    return {"status": "success", "data": _state()}

@app.get("/topics")
def get_topics():
    return {"status": "success", "data": [t.value for t in NewsTopic]}

@app.get("/intervals")
def get_intervals():
    return {"status": "success", "data": list(INTERVAL_OPTIONS)}

# POST
@app.post("/config/topic")
def set_topic(topic: NewsTopic):
    controller.set_topic(topic)
    return {"status": "success", "topic": controller.config.topic.value}

@app.post("/config/interval")
def set_interval(minutes: int):
    try:
        controller.set_interval(minutes)
    except ValueError:
        raise HTTPException(422, f"Intervalo inválido; use um de {list(INTERVAL_OPTIONS)}")
    return {"status": "success", "update_interval_minutes": minutes}

@app.post("/config/local-mode")
def toggle_local_mode():
    if not controller.toggle_local_mode():
        return {"status": "unavailable", "local_mode": controller.config.local_mode}
    return {"status": "success", "local_mode": controller.config.local_mode}

@app.post("/config/auto-post")
def toggle_auto_post():
    return {"status": "success", "auto_post_to_x": controller.toggle_auto_post()}

@app.post("/account/link")
async def link_account():
    await controller.link_account()
    return {"status": "success", "is_x_connected": controller.config.is_x_connected}

@app.post("/account/unlink")
def unlink_account():
    controller.unlink_account()
    return {"status": "success", "is_x_connected": controller.config.is_x_connected}

@app.post("/scan")
async def scan():
    started = await controller.trigger_update()
    return {"status": "success" if started else "busy", "data": _state()}

@app.post("/news/{item_id}/post")
async def post_news(item_id: str):
    try:
        posted = await controller.post_item(item_id)
    except KeyError:
        raise HTTPException(404, "Notícia não encontrada")
    if not posted:
        raise HTTPException(409, "Publicação não realizada (conta X não vinculada ou falha no envio)")
    return {"status": "success"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("chronos.api.main:app", host="0.0.0.0", port=8000, reload=True)
