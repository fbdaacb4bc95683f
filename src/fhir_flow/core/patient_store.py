# ============================================================================
# src/fhir_flow/core/patient_store.py
# ============================================================================
"""
Patient Consolidation Store

In-process store that merges mapped resource bundles into one record per
patient identity, plus three global bounded logs (uploads, resources,
activity).

Concurrency:
- upserts for the same identity key are serialized by a per-key lock
- upserts for different keys run in parallel
- the global logs share one lock for append-and-truncate

Records are only ever mutated through this class.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from ..config import store_settings, StoreSettings
from ..constants import DEMO_PATIENTS, UNKNOWN_PATIENT
from ..utils.exceptions import NotFound
from .bounded_list import BoundedList
from .context import (
    ActivityEvent,
    DocumentEnvelope,
    ImageUpload,
    LogEntry,
    PatientRecord,
    ResourceEntry,
    UploadEntry,
    utc_now,
)

logger = logging.getLogger(__name__)


def normalize_patient_name(name: Optional[str]) -> str:
    """Case-folded, trimmed display name."""
    return str(name or "").strip().lower()


def identity_key(display_name: Optional[str], document_id: Optional[str]) -> str:
    """
    Identity key for a patient record.

    Falls back to doc-<document id> (or doc-<epoch millis> when there is no
    id either) if the display name normalizes to an empty string.
    """
    key = normalize_patient_name(display_name)
    if key:
        return key
    return f"doc-{document_id or int(time.time() * 1000)}"


def patient_display_name(resources: List[Dict[str, Any]]) -> str:
    """Name text of the first Patient resource in a bundle."""
    for resource in resources:
        if resource and resource.get("resourceType") == "Patient":
            names = resource.get("name") or []
            if names and names[0].get("text"):
                return names[0]["text"]
            break
    return UNKNOWN_PATIENT


class PatientConsolidationStore:
    """
    Consolidated patient records and the global activity logs.
    """

    def __init__(self, settings: Optional[StoreSettings] = None):
        self.settings = settings or store_settings

        self._records: Dict[str, PatientRecord] = {}
        self._key_locks: Dict[str, asyncio.Lock] = {}
        self._registry_lock = asyncio.Lock()
        self._global_lock = asyncio.Lock()

        self._uploads: BoundedList[UploadEntry] = BoundedList(self.settings.MAX_UPLOADS)
        self._resources: BoundedList[ResourceEntry] = BoundedList(self.settings.MAX_RESOURCES)
        self._activity: BoundedList[ActivityEvent] = BoundedList(self.settings.MAX_ACTIVITY)

    async def _lock_for(self, key: str) -> asyncio.Lock:
        async with self._registry_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._key_locks[key] = lock
            return lock

    def _new_record(self, key: str, display_name: str, now: str) -> PatientRecord:
        return PatientRecord(
            id=key,
            display_name=display_name,
            last_updated=now,
            logs=BoundedList(self.settings.MAX_PATIENT_LOGS),
            uploads=BoundedList(self.settings.MAX_PATIENT_UPLOADS),
        )

    async def _push_activity(self, event_type: str, message: str, timestamp: str) -> None:
        async with self._global_lock:
            self._activity.push_front(ActivityEvent(event_type, message, timestamp))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def upsert(self, mapped: Dict[str, Any], envelope: DocumentEnvelope) -> PatientRecord:
        """
        Merge a mapped bundle into the record for its patient identity.

        Existing record: resource set replaced, log entry prepended, image
        upload prepended when the envelope is an image. New record: created
        with the same first entries. Either way one activity event is added.
        """
        resources = list(mapped.get("resources") or [])
        display_name = patient_display_name(resources)
        key = identity_key(display_name, envelope.document_id)
        now = utc_now()

        log_entry = LogEntry(
            timestamp=now,
            document_id=envelope.document_id,
            warnings=list(mapped.get("warnings") or []),
            resource_count=len(resources),
        )

        image_upload = None
        if envelope.is_image:
            image_upload = ImageUpload(
                document_id=envelope.document_id,
                file_name=envelope.file_name or "uploaded-image",
                mime_type=envelope.mime_type,
                data_url=envelope.file_content or None,
                uploaded_at=now,
            )

        lock = await self._lock_for(key)
        async with lock:
            record = self._records.get(key)
            created = record is None
            if created:
                record = self._new_record(key, display_name, now)
                self._records[key] = record

            record.last_updated = now
            record.resources = resources
            record.logs.push_front(log_entry)
            if image_upload is not None:
                record.uploads.push_front(image_upload)

        if created:
            logger.info(f"Created patient record '{key}'")
            await self._push_activity("patient_create", f"{record.display_name} profile created", now)
        else:
            logger.info(f"Updated patient record '{key}' ({len(record.logs)} log entries)")
            await self._push_activity("patient_update", f"{record.display_name} profile updated", now)

        return record

    async def record_upload(self, envelope: DocumentEnvelope) -> UploadEntry:
        entry = UploadEntry(
            document_id=envelope.document_id or f"doc-{int(time.time() * 1000)}",
            source_type=envelope.source_type or "unknown",
            content_type=envelope.content_type or "unknown",
            file_name=envelope.file_name or None,
            mime_type=envelope.mime_type or None,
            received_at=utc_now(),
        )

        async with self._global_lock:
            self._uploads.push_front(entry)
            self._activity.push_front(
                ActivityEvent("upload", f"Document {entry.document_id} uploaded", entry.received_at)
            )

        return entry

    async def record_resources(
        self,
        mapped: Dict[str, Any],
        document_id: Optional[str],
        patient: Optional[PatientRecord] = None,
    ) -> List[ResourceEntry]:
        now = utc_now()
        entries = [
            ResourceEntry(
                document_id=document_id,
                resource_type=resource.get("resourceType"),
                resource_id=resource.get("id"),
                patient_name=patient.display_name if patient else None,
                recorded_at=now,
                resource=resource,
            )
            for resource in (mapped.get("resources") or [])
        ]

        async with self._global_lock:
            self._resources.push_front_many(entries)

        return entries

    async def consolidate(self, mapped: Dict[str, Any], envelope: DocumentEnvelope) -> PatientRecord:
        """Record a successful pipeline run: upload entry, patient merge, resources."""
        upload = await self.record_upload(envelope)
        record = await self.upsert(mapped, envelope)
        await self.record_resources(mapped, upload.document_id, record)
        return record

    async def clear_images(self, record_id: str) -> PatientRecord:
        """
        Raises:
            NotFound: no record with this id
        """
        if record_id not in self._records:
            raise NotFound("patient not found")

        lock = await self._lock_for(record_id)
        async with lock:
            record = self._records[record_id]
            record.uploads.clear()
            record.last_updated = utc_now()

        logger.info(f"Cleared image history for '{record_id}'")
        return record

    def seed_demo_patients(self, patients: Optional[List[Dict[str, Any]]] = None) -> int:
        """
        Insert demo records, skipping keys that already exist.

        Runs before the gateway serves requests, so it takes no locks.
        Returns the number of records created.
        """
        now = utc_now()
        created = 0

        for seed in (DEMO_PATIENTS if patients is None else patients):
            key = normalize_patient_name(seed["display_name"])
            if not key or key in self._records:
                continue

            lab = seed["lab"]
            record = self._new_record(key, seed["display_name"], now)
            record.resources = [
                {
                    "resourceType": "Patient",
                    "id": f"seed-{key}",
                    "name": [{"text": seed["display_name"]}],
                    "gender": seed["gender"],
                },
                {
                    "resourceType": "Observation",
                    "id": f"seed-obs-{key}",
                    "status": "final",
                    "code": {"text": lab["test_name"]},
                    "valueQuantity": {"value": lab["value"], "unit": lab["unit"]},
                },
            ]
            record.logs.push_front(
                LogEntry(timestamp=now, document_id=f"seed-{key}", warnings=[], resource_count=2)
            )
            self._records[key] = record
            created += 1

        if created:
            logger.info(f"Seeded {created} demo patient records")
        return created

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, record_id: str) -> PatientRecord:
        """
        Raises:
            NotFound: no record with this id
        """
        record = self._records.get(record_id)
        if record is None:
            raise NotFound("patient not found")
        return record

    def list(self) -> List[Dict[str, Any]]:
        """Record summaries in insertion order."""
        return [record.summary() for record in list(self._records.values())]

    def uploads(self) -> List[UploadEntry]:
        return self._uploads.to_list()

    def resources(self) -> List[ResourceEntry]:
        return self._resources.to_list()

    def activity(self, limit: Optional[int] = None) -> List[ActivityEvent]:
        return self._activity.head(limit or self.settings.ACTIVITY_FEED_LIMIT)

    def stats(self) -> Dict[str, int]:
        return {
            "patients": len(self._records),
            "uploads": len(self._uploads),
            "resources": len(self._resources),
        }
