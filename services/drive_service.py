# services/drive_service.py
import io
import logging
from typing import Dict, List, Optional, Tuple

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

logger = logging.getLogger(__name__)

TEXT_MIMETYPE = "text/plain"


def find_file_in_folder_by_name(
    drive: Resource,
    folder_id: str,
    filename: str,
) -> Optional[Dict]:
    safe_name = filename.replace("'", "\\'")
    query = (
        f"name = '{safe_name}' and "
        f"'{folder_id}' in parents and "
        f"trashed = false"
    )

    resp = drive.files().list(
        q=query,
        fields="files(id, name, webViewLink)",
        pageSize=1,
    ).execute()

    files: List[Dict] = resp.get("files", [])
    return files[0] if files else None


def _text_media(content: str) -> MediaIoBaseUpload:
    return MediaIoBaseUpload(
        io.BytesIO(content.encode("utf-8")),
        mimetype=TEXT_MIMETYPE,
        resumable=False,
    )


def archive_report(
    drive: Resource,
    folder_id: str,
    filename: str,
    content: str,
) -> Tuple[bool, str, Optional[str]]:
    """
    Store a text report in `folder_id`, replacing the content of a file with
    the same name if it is already there (one report per date).

    Returns (ok, message, web_view_link)
    """
    try:
        existing = find_file_in_folder_by_name(drive, folder_id, filename)

        if existing:
            file = drive.files().update(
                fileId=existing["id"],
                media_body=_text_media(content),
                fields="id, webViewLink",
            ).execute()
            logger.info('Report "%s" updated (fileId=%s)', filename, file["id"])
            return True, "Relatório atualizado no Drive", file.get("webViewLink")

        metadata = {
            "name": filename,
            "parents": [folder_id],
            "mimeType": TEXT_MIMETYPE,
        }
        file = drive.files().create(
            body=metadata,
            media_body=_text_media(content),
            fields="id, webViewLink",
        ).execute()
        logger.info('Report "%s" uploaded (fileId=%s)', filename, file["id"])
        return True, "Relatório enviado ao Drive", file.get("webViewLink")

    except HttpError as e:
        logger.error('Drive upload of "%s" failed: %s', filename, e)
        return False, f"Falha ao enviar ao Drive: {e}", None
