from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    backend_url: str = "http://localhost:8000"
    # Session token issued by the auth provider, sent as a Bearer token
    session_token: str = ""
    timeout: float = 10.0

    model_config = {
        "env_prefix": "DASHBOARD_",
        "env_file": ".env",
        "extra": "ignore",
    }


settings = ClientSettings()
