"""
Upload defaults shared by the backend and the client library.
"""

ALLOWED_FILE_TYPES = [
    'audio/mpeg',   # .mp3
    'audio/mp4',    # .m4a
    'audio/wav',    # .wav
    'audio/x-wav',  # alternative MIME type for .wav
    'audio/ogg',    # .ogg
    'audio/webm',   # .webm
    'audio/aac',    # .aac
]

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB

# Wildcard marker accepted wherever a list of allowed types is expected
ALLOW_ANY_TYPE = '*'

OBJECT_KEY_PREFIX = 'uploads'

# Credential lifetimes in seconds
UPLOAD_CREDENTIAL_EXPIRATION = 600   # 10 minutes
READ_CREDENTIAL_EXPIRATION = 3600    # 1 hour

# Storage responds with "204 No Content" to an accepted presigned POST
TRANSFER_SUCCESS_STATUS = 204

BYTES_PER_MB = 1024 * 1024
