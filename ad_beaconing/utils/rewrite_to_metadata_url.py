import httpx

METADATA_PATH_SEGMENT = "metadata"


def rewrite_to_metadata_url(manifest_url: str) -> str:
    """Swap the manifest file name for the metadata endpoint.

    `https://host/variant/master.m3u8?sessid=1` becomes
    `https://host/variant/metadata?sessid=1`.
    """
    url = httpx.URL(manifest_url)
    head, _, _ = url.path.rpartition("/")
    return str(url.copy_with(path=f"{head}/{METADATA_PATH_SEGMENT}"))
