"""Studio: FastAPI service for PBL design boards."""
