"""VOE API operation catalog: path, HTTP method and parameter schema per endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Type

from voe.api.validation import (
    DMCAListParams,
    FileCloneParams,
    FileDeleteParams,
    FileInfoParams,
    FileListParams,
    FileMoveParams,
    FileRenameParams,
    FolderCreateParams,
    FolderListParams,
    FolderRenameParams,
    OperationParams,
    PremiumKeyParams,
    RemoteUploadParams,
)


@dataclass(frozen=True)
class Endpoint:
    path: str
    method: str = "GET"
    schema: Optional[Type[OperationParams]] = None


ENDPOINTS: Dict[str, Endpoint] = {
    # Account
    "account_info": Endpoint("/account/info"),
    "account_stats": Endpoint("/account/stats"),
    # Upload
    "upload_server": Endpoint("/upload/server"),
    "upload_url": Endpoint("/upload/url", "POST", RemoteUploadParams),
    "upload_url_list": Endpoint("/upload/url/list"),
    # Files
    "file_clone": Endpoint("/file/clone", "GET", FileCloneParams),
    "file_info": Endpoint("/file/info", "GET", FileInfoParams),
    "file_list": Endpoint("/file/list", "GET", FileListParams),
    "file_rename": Endpoint("/file/rename", "GET", FileRenameParams),
    "file_set_folder": Endpoint("/file/set_folder", "GET", FileMoveParams),
    "file_delete": Endpoint("/file/delete", "GET", FileDeleteParams),
    # Folders
    "folder_list": Endpoint("/folder/list", "GET", FolderListParams),
    "folder_create": Endpoint("/folder/create", "GET", FolderCreateParams),
    "folder_rename": Endpoint("/folder/rename", "GET", FolderRenameParams),
    # History
    "files_deleted": Endpoint("/files/deleted", "GET", DMCAListParams),
    "dmca_list": Endpoint("/dmca/list", "GET", DMCAListParams),
    # Settings
    "settings_domain": Endpoint("/settings/domain"),
    # Premium reseller
    "premium_generate": Endpoint("/reseller/premium/generate", "GET", PremiumKeyParams),
}
