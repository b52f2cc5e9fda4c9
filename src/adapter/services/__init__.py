from .unit_of_work import SqlAlchemyUnitOfWork
from .settings_rate_provider import SettingsRateProvider

__all__ = [
    "SqlAlchemyUnitOfWork",
    "SettingsRateProvider",
]
