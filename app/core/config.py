from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # Database
    db_server: str = Field("", env="DB_SERVER")
    db_name: str = Field("", env="DB_NAME")
    db_user: str = Field("", env="DB_USER")
    db_password: str = Field("", env="DB_PASSWORD")
    db_driver: str = Field("ODBC Driver 18 for SQL Server", env="DB_DRIVER")
    db_login_timeout: int = Field(15, env="DB_LOGIN_TIMEOUT")
    db_query_timeout: int = Field(30, env="DB_QUERY_TIMEOUT")

    # Price list import
    pricelist_header_rows: int = Field(4, env="PRICELIST_HEADER_ROWS")
    pricelist_batch_size: int = Field(50, env="PRICELIST_BATCH_SIZE")

    # API
    api_host: str = Field("0.0.0.0", env="API_HOST")
    api_port: int = Field(8000, env="API_PORT")
    debug: bool = Field(False, env="DEBUG")

    # App
    app_name: str = Field("Pricelist Import API", env="APP_NAME")
    version: str = Field("1.0.0", env="VERSION")

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
