"""
clinic-assessment-engine configuration

Backend endpoints, table names, lead-capture behavior and logging live here.
Environment variables override defaults for deployment flexibility.
"""

import os
from dataclasses import dataclass, field


@dataclass
class SupabaseConfig:
    """Where the practice backend lives"""
    url: str = os.getenv("SUPABASE_URL", "")
    anon_key: str = os.getenv("SUPABASE_ANON_KEY", "")
    timeout_seconds: float = float(os.getenv("SUPABASE_TIMEOUT", "15.0"))

    @property
    def configured(self) -> bool:
        """True when both URL and key are set."""
        return bool(self.url and self.anon_key)


@dataclass
class CatalogConfig:
    """Quiz catalog behavior"""
    custom_quiz_table: str = os.getenv("CUSTOM_QUIZ_TABLE", "custom_quizzes")
    warn_on_load: bool = os.getenv("CATALOG_WARN_ON_LOAD", "true").lower() == "true"


@dataclass
class LeadConfig:
    """Lead capture settings"""
    submit_function: str = os.getenv("LEAD_SUBMIT_FUNCTION", "submit-lead")
    leads_table: str = os.getenv("LEADS_TABLE", "quiz_leads")
    default_source: str = os.getenv("LEAD_SOURCE", "chatbot_page")
    track_partial: bool = os.getenv("TRACK_PARTIAL", "true").lower() == "true"


@dataclass
class LogConfig:
    """Logging"""
    level: str = os.getenv("LOG_LEVEL", "WARNING")


@dataclass
class Config:
    """Master config, import this"""
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    leads: LeadConfig = field(default_factory=LeadConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def offline(cls) -> "Config":
        """For development and testing: no backend, no partial tracking"""
        cfg = cls()
        cfg.supabase.url = ""
        cfg.supabase.anon_key = ""
        cfg.leads.track_partial = False
        return cfg


# Singleton
config = Config()
