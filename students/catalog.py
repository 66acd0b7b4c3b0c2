"""
External lecture catalogue client.

Searches YouTube Data API playlists for supplementary (NPTEL) courses.
Documentation: https://developers.google.com/youtube/v3/docs/search/list
"""

import requests
from typing import Dict, List
import logging

from django.conf import settings

from core.exceptions import RecordsError
from gradebook import config

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
PLAYLIST_URL = "https://www.youtube.com/playlist?list={playlist_id}"


class CatalogUnavailable(RecordsError):
    """The external catalogue could not be queried."""

    status_code = 502


class CatalogClient:
    """
    Thin wrapper over the YouTube search endpoint.

    Results are normalized to the fields a SupplementaryEnrollment stores, so
    a search hit can be posted straight back to the enroll endpoint.
    """

    def __init__(self, api_key: str = None, timeout: int = None):
        self.api_key = api_key if api_key is not None else settings.YOUTUBE_API_KEY
        self.timeout = timeout or config.CATALOG_TIMEOUT

    def search(self, query: str = '', max_results: int = None) -> List[Dict]:
        if not self.api_key:
            raise CatalogUnavailable('YouTube API key not configured')

        max_results = max_results or config.CATALOG_MAX_RESULTS
        params = {
            'part': 'snippet',
            'q': f"{query or ''} {config.SUPPLEMENTARY_COURSE_TYPE}".strip(),
            'type': 'playlist',
            'maxResults': max_results,
            'key': self.api_key,
        }

        try:
            response = requests.get(SEARCH_URL, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.warning(f"Catalogue search timed out for '{query}'")
            raise CatalogUnavailable('Catalogue search timed out')
        except requests.exceptions.RequestException as e:
            logger.warning(f"Catalogue search failed for '{query}': {e}")
            raise CatalogUnavailable(f'Connection error: {str(e)}')

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code != 200:
            message = data.get('error', {}).get('message', 'Catalogue search failed')
            logger.warning(f"Catalogue search returned {response.status_code}: {message}")
            raise CatalogUnavailable('Error fetching supplementary courses', error=message)

        return [self._normalize(item) for item in data.get('items') or []]

    @staticmethod
    def _normalize(item: Dict) -> Dict:
        snippet = item.get('snippet', {})
        thumbnails = snippet.get('thumbnails', {})
        thumbnail = thumbnails.get('medium') or thumbnails.get('default') or {}
        playlist_id = item.get('id', {}).get('playlistId', '')
        return {
            'external_id': playlist_id,
            'title': snippet.get('title', ''),
            'description': snippet.get('description', ''),
            'thumbnail_url': thumbnail.get('url', ''),
            'video_url': PLAYLIST_URL.format(playlist_id=playlist_id),
            'instructor': snippet.get('channelTitle', ''),
            'published_at': snippet.get('publishedAt'),
        }


def search_external_catalog(query='', max_results=None):
    return CatalogClient().search(query, max_results)
