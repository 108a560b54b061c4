import logging
import re
from typing import List
from urllib.parse import urljoin, urlparse, parse_qs
from bs4 import BeautifulSoup

from ingestion.grade_ingestion.core.base_scanner import BaseScanner, ScannedGroup

logger = logging.getLogger(__name__)

class VsuetGroupScanner(BaseScanner):
    """
    Discovers study groups on a faculty page.

    Strategy A: <select> controls whose name/id mentions a group.
    Strategy B: links carrying a `group=` query parameter.
    """

    SELECT_HINTS = ("group", "grp", "груп")
    PLACEHOLDER_PATTERN = re.compile(r'(?:выбер|все\s+групп|^-+$)', re.IGNORECASE)

    def extract_groups(self, html_content: str, base_url: str) -> List[ScannedGroup]:
        soup = BeautifulSoup(html_content or "", 'html.parser')
        results = []
        seen = set()

        def register(name: str, method: str):
            clean = re.sub(r'\s+', ' ', name or '').strip()
            if not clean or self.PLACEHOLDER_PATTERN.search(clean): return
            if clean in seen: return
            seen.add(clean)
            results.append(ScannedGroup(name=clean, detection_method=method))

        # Strategy A: Dropdowns
        for select in soup.find_all('select'):
            marker = f"{select.get('name', '')} {select.get('id', '')}".lower()
            if not any(hint in marker for hint in self.SELECT_HINTS): continue

            for option in select.find_all('option'):
                register(option.get_text(" ", strip=True) or option.get('value', ''), "SelectOption")

        # Strategy B: Query links
        for link in soup.find_all('a', href=True):
            full_url = urljoin(base_url, link['href'])
            params = parse_qs(urlparse(full_url).query)
            values = params.get('group') or params.get('Group')
            if not values: continue
            register(values[0], "QueryLink")

        logger.info(f"Scanner identified {len(results)} group(s) on {base_url}")
        return results
