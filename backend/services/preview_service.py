"""
Preview Service - معاينة شهادة VCC
Holds the rendered preview of the listing's first record. Exactly one
preview handle stays live; superseded ones are revoked.
"""
import logging
import uuid
from typing import Callable, Awaitable, Dict, List, Optional

from models.vehicle import VehicleRecord
from utils import vcc_pdf

logger = logging.getLogger(__name__)


class PreviewStore:
    """In-memory binary handles for rendered previews, served by the preview route"""

    def __init__(self):
        self._items: Dict[str, bytes] = {}

    def create(self, content: bytes) -> str:
        handle = uuid.uuid4().hex
        self._items[handle] = content
        return handle

    def get(self, handle: str) -> Optional[bytes]:
        return self._items.get(handle)

    def revoke(self, handle: str):
        self._items.pop(handle, None)

    def live_count(self) -> int:
        return len(self._items)


async def render_blob(vehicle: VehicleRecord, origin: str) -> Optional[bytes]:
    return await vcc_pdf.render(vehicle, 'blob', origin)


class PreviewSlot:
    """
    Latest-wins preview holder.

    Each refresh is tagged with a generation number. A refresh that finishes
    after a newer one started is discarded and its handle revoked; there is
    no cancellation of the render itself.
    """

    def __init__(self, store: PreviewStore, renderer: Callable[..., Awaitable[Optional[bytes]]] = render_blob):
        self.store = store
        self.renderer = renderer
        self.handle: Optional[str] = None
        self.vehicle_id: Optional[str] = None
        self._generation = 0

    async def refresh(self, vehicles: List[VehicleRecord], origin: str) -> Optional[str]:
        self._generation += 1
        generation = self._generation

        if not vehicles:
            self.clear()
            return None

        vehicle = vehicles[0]
        try:
            content = await self.renderer(vehicle, origin)
        except Exception as e:
            logger.error(f"Error generating PDF preview: {e}")
            content = None

        if generation != self._generation:
            # a newer refresh owns the slot now
            return self.handle

        if content is None:
            self.clear()
            return None

        handle = self.store.create(content)
        self._adopt(handle, vehicle.id)
        return handle

    def _adopt(self, handle: str, vehicle_id: Optional[str]):
        previous = self.handle
        self.handle = handle
        self.vehicle_id = vehicle_id
        if previous and previous != handle:
            self.store.revoke(previous)

    def current(self) -> Optional[bytes]:
        if not self.handle:
            return None
        return self.store.get(self.handle)

    def clear(self):
        if self.handle:
            self.store.revoke(self.handle)
        self.handle = None
        self.vehicle_id = None

    def close(self):
        self._generation += 1
        self.clear()


preview_store = PreviewStore()
listing_preview = PreviewSlot(preview_store)
