"""
Constants for kintone_transport.
"""

SDK_NAME = "kintone-transport"
SDK_VERSION = "0.1.0"

SCHEME = "https"
BASE_URL = "/k/v1/{api_path}.json"
BASE_GUEST_URL = "/k/guest/{guest_space_id}/v1/{api_path}.json"

# Header names
USER_AGENT = "User-Agent"
CONTENT_TYPE = "Content-Type"
AUTHORIZATION = "Authorization"
HEADER_PASSWORD_AUTH = "X-Cybozu-Authorization"
HEADER_API_TOKEN = "X-Cybozu-API-Token"

DEFAULT_USER_AGENT = f"{SDK_NAME}/{SDK_VERSION}"

# Multipart field name used by the file endpoint
FILE_FIELD_NAME = "file"

# Logical API names -> URL path segment
API_PATHS = {
    "RECORD": "record",
    "RECORDS": "records",
    "RECORD_COMMENT": "record/comment",
    "RECORD_COMMENTS": "record/comments",
    "RECORD_ASSIGNEES": "record/assignees",
    "RECORD_STATUS": "record/status",
    "RECORDS_STATUS": "records/status",
    "RECORDS_CURSOR": "records/cursor",
    "BULK_REQUEST": "bulkRequest",
    "FILE": "file",
    "APP": "app",
    "APPS": "apps",
    "APP_SETTINGS": "app/settings",
    "APP_FORM_FIELDS": "app/form/fields",
    "APP_FORM_LAYOUT": "app/form/layout",
    "APP_VIEWS": "app/views",
    "APP_DEPLOY": "preview/app/deploy",
    "SPACE": "space",
    "SPACE_THREAD": "space/thread",
    "SPACE_MEMBERS": "space/members",
    "GUESTS": "guests",
}
