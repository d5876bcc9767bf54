import logging
import os
import re
import time
from typing import List, Optional

from fastapi import HTTPException, UploadFile
from supabase import Client

logger = logging.getLogger(__name__)

AVATARS_BUCKET = "avatars"
COMPANY_LOGOS_BUCKET = "company_logos"
POST_MEDIA_BUCKET = "post_media"
MESSAGE_ATTACHMENTS_BUCKET = "message-attachments"
RFQ_ATTACHMENTS_BUCKET = "rfq-attachments"
TIER2_DOCUMENTS_BUCKET = "tier2-verification-documents"

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def epoch_ms() -> int:
    return int(time.time() * 1000)


def safe_filename(filename: Optional[str]) -> str:
    name = os.path.basename(filename or "file")
    return re.sub(r"[^A-Za-z0-9._-]", "_", name) or "file"


def file_extension(filename: Optional[str], default: str = "bin") -> str:
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    return ext or default


def build_object_path(prefix: str, filename: Optional[str]) -> str:
    return f"{prefix}/{epoch_ms()}-{safe_filename(filename)}"


def media_type_for(content_type: Optional[str]) -> str:
    if content_type and content_type.startswith("video/"):
        return "video"
    if content_type and content_type.startswith("image/"):
        return "image"
    return "document"


class StorageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def upload(self, bucket: str, path: str, content: bytes, content_type: Optional[str] = None,
               upsert: bool = False) -> str:
        """Upload bytes to a Supabase Storage bucket and return the object path"""
        if len(content) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail="File is too large")
        file_options = {"content-type": content_type or "application/octet-stream"}
        if upsert:
            file_options["upsert"] = "true"
        try:
            self.supabase.storage.from_(bucket).upload(path, content, file_options=file_options)
            logger.info(f"Uploaded {bucket}/{path}")
            return path
        except Exception as e:
            logger.error(f"Supabase Storage upload failed ({bucket}/{path}): {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to upload file")

    async def upload_file(self, bucket: str, path: str, file: UploadFile, upsert: bool = False) -> str:
        content = await file.read()
        return self.upload(bucket, path, content, file.content_type, upsert=upsert)

    def get_public_url(self, bucket: str, path: str) -> str:
        return self.supabase.storage.from_(bucket).get_public_url(path)

    def remove(self, bucket: str, paths: List[str]) -> None:
        try:
            self.supabase.storage.from_(bucket).remove(paths)
        except Exception as e:
            logger.warning(f"Failed to delete {paths} from {bucket}: {e}")

    def create_signed_url(self, bucket: str, path: str, expires_in: int = 3600) -> str:
        """Time-limited download link for an object in a private bucket"""
        try:
            result = self.supabase.storage.from_(bucket).create_signed_url(path, expires_in)
        except Exception as e:
            logger.error(f"Failed to sign {bucket}/{path}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create download link")
        url = result.get("signedURL") or result.get("signedUrl")
        if not url:
            raise HTTPException(status_code=404, detail="File not found")
        return url
