"""
Direct-to-storage uploads with presigned S3 credentials.
"""
__version__ = "0.1.0"
