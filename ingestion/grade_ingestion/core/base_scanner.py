from abc import ABC, abstractmethod
from typing import List
from dataclasses import dataclass

@dataclass(frozen=True)
class ScannedGroup:
    """
    Standardized output from any portal scanner.
    """
    name: str            # e.g. "ИС-21"
    detection_method: str # e.g. "SelectOption" or "QueryLink"

class BaseScanner(ABC):
    """
    Strategy Interface for reading portal-specific navigation structures.
    Decouples 'Discovery' from 'Orchestration'.
    """
    @abstractmethod
    def extract_groups(self, html_content: str, base_url: str) -> List[ScannedGroup]:
        """
        Parses a faculty page and returns the study groups it lists,
        de-duplicated and in page order.
        """
        pass
