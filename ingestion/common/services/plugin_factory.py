from typing import Dict, List, Type
from ingestion.grade_ingestion.core.base_plugin import BaseGradePlugin

from ingestion.grade_ingestion.plugins.vsuet.plugin import VsuetPlugin

class PluginFactory:
    """
    Central Registry for all Portal Plugins.
    """
    _registry: Dict[str, Type[BaseGradePlugin]] = {
        "vsuet": VsuetPlugin,
    }

    @classmethod
    def get_plugin(cls, slug: str) -> BaseGradePlugin:
        plugin_cls = cls._registry.get(slug.lower())
        if not plugin_cls:
            raise ValueError(f"Plugin not found for portal: {slug}")
        return plugin_cls()

    @classmethod
    def list_available_plugins(cls) -> List[str]:
        """Returns a list of registered portal slugs"""
        return list(cls._registry.keys())
