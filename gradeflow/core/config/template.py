from .base import BaseSettings


class TemplateSettings(BaseSettings):
    path: str = "gradeflow/templates"
