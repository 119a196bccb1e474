"""
Basic request writing examples using http_writer.

These examples write requests to an in-memory sink and print what
would go on the wire. Pass a connected socket to ``execute`` to send
them for real.
"""

import io
import logging
import os
import tempfile

from http_writer import MemorySink, Request
from http_writer.chunked import decode

# Configure logging
logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


def simple_get_request():
    """Demonstrate a request without a body."""
    logger.info("Writing simple GET request...")
    
    sink = MemorySink()
    request = Request.create("GET", "/get", headers={"Host": "httpbin.org"})
    written = request.execute(sink)
    
    logger.info(f"Wrote {written} bytes:\n{sink.written_data.decode('latin-1')}")


def post_request_with_body():
    """Demonstrate a POST with an in-memory body."""
    logger.info("Writing POST request with body...")
    
    sink = MemorySink()
    request = Request.create(
        "POST",
        "/post",
        headers={"Host": "httpbin.org", "Content-Type": "application/json"},
        body=b'{"message": "Hello, World!"}',
    )
    request.execute(sink)
    
    logger.info(f"Content-Length: {request['Content-Length']}")


def chunked_stream_upload():
    """Demonstrate streaming a body of unknown length."""
    logger.info("Writing chunked stream upload...")
    
    sink = MemorySink()
    request = Request.create(
        "PUT",
        "/put",
        headers={
            "Host": "httpbin.org",
            "Transfer-Encoding": "chunked",
            "Content-Type": "application/octet-stream",
        },
    )
    request.body_stream = io.BytesIO(os.urandom(5000))
    request.execute(sink)
    
    header, _, body = sink.written_data.partition(b"\r\n\r\n")
    logger.info(f"Sent {len(sink.writes) - 1} chunk writes, {len(decode(body))} payload bytes")


def multipart_upload():
    """Demonstrate a multipart/form-data upload with a file."""
    logger.info("Writing multipart upload...")
    
    with tempfile.NamedTemporaryFile(suffix=".txt") as handle:
        handle.write(b"file contents\n")
        handle.flush()
        
        with open(handle.name, "rb") as upload:
            sink = MemorySink()
            request = Request.create("POST", "/post", headers={"Host": "httpbin.org"})
            request.set_form(
                [
                    ("description", "example upload"),
                    ("attachment", upload, {"content_type": "text/plain"}),
                ],
                "multipart/form-data",
            )
            request.execute(sink)
    
    logger.info(f"Content-Type: {request['Content-Type']}")
    logger.info(f"Content-Length: {request['Content-Length']}")


def main():
    """Run all examples."""
    simple_get_request()
    post_request_with_body()
    chunked_stream_upload()
    multipart_upload()


if __name__ == "__main__":
    main()
