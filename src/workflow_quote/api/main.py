from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workflow_quote import __version__
from workflow_quote.config.log_setup import setup_logging
from workflow_quote.api import state
from workflow_quote.api.quote_api import router as quote_router

setup_logging(state.settings.log_level)

app = FastAPI(
    title="Workflow Quote API",
    description="Prices n8n workflows node by node and queues quotes for review",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quote_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Workflow Quote API Active"}


@app.get("/system/status")
async def get_status():
    engine = state.engine
    return {
        "engine_active": True,
        "pricing_table_loaded": engine.loaded,
        "node_type_count": len(engine.get_available_node_types()),
        "pricing_table_path": str(engine.table_path),
    }
