"""
WebHDFS log output.

Compresses log payloads (gzip, Snappy whole-file record or chunked Snappy
container) and writes them to HDFS over WebHDFS with simple or Kerberos
authentication.

Collaborator interface:
    prepare_client, verify, compress, acquire_credentials, release_credentials
"""

from core.auth.kerberos import acquire_credentials, release_credentials
from webhdfs_output.client import WebHdfsClient
from webhdfs_output.codec import (
    CompressionMode,
    SnappyFormat,
    compress,
    compress_gzip,
    compress_snappy_file,
    compress_snappy_stream,
    snappy_header,
)
from webhdfs_output.helpers import (
    ClientConfig,
    KerberosAuth,
    SimpleAuth,
    load_module,
    prepare_client,
    verify,
)
from webhdfs_output.output import WebHdfsOutput

__all__ = [
    "WebHdfsOutput",
    "WebHdfsClient",
    "ClientConfig",
    "SimpleAuth",
    "KerberosAuth",
    "CompressionMode",
    "SnappyFormat",
    "prepare_client",
    "verify",
    "load_module",
    "compress",
    "compress_gzip",
    "compress_snappy_file",
    "compress_snappy_stream",
    "snappy_header",
    "acquire_credentials",
    "release_credentials",
]
