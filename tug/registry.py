"""Pulling images from the Docker Hub registry and unpacking their layers."""

from __future__ import annotations

import io
import os
import tarfile
from pathlib import Path
from typing import Any, Mapping

import requests

AUTH_URL = "https://auth.docker.io/token"
REGISTRY_URL = "https://registry-1.docker.io/v2/library"
MANIFEST_MEDIA_TYPE = "application/vnd.docker.distribution.manifest.v2+json"
DEFAULT_TAG = "latest"
_TIMEOUT = 60


class RegistryError(Exception):
    """Raised when talking to the registry or unpacking a layer fails."""


def parse_image(image: str) -> tuple[str, str]:
    """Split ``name[:tag]`` into name and tag, defaulting the tag to latest."""
    parts = image.split(":")
    tag = parts[1] if len(parts) > 1 else DEFAULT_TAG
    return parts[0], tag


def _token_url(repository: str) -> str:
    return (
        f"{AUTH_URL}?service=registry.docker.io"
        f"&scope=repository:library/{repository}:pull"
    )


def _get(url: str, token: str | None = None, accept: str | None = None) -> requests.Response:
    headers = {}
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"
    if accept is not None:
        headers["Accept"] = accept
    try:
        response = requests.get(url, headers=headers, timeout=_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise RegistryError(f"request to {url} failed: {exc}") from exc
    return response


def _json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise RegistryError(f"invalid JSON from {response.url}") from exc


def _fetch_token(repository: str) -> str:
    body = _json(_get(_token_url(repository)))
    token = body.get("token") if isinstance(body, Mapping) else None
    if not isinstance(token, str):
        raise RegistryError("token response holds no token")
    return token


def _layer_digests(manifest: Any) -> list[str]:
    layers = manifest.get("layers") if isinstance(manifest, Mapping) else None
    if not isinstance(layers, list):
        raise RegistryError("manifest holds no layers")
    digests = [layer.get("digest") if isinstance(layer, Mapping) else None for layer in layers]
    if not all(isinstance(digest, str) for digest in digests):
        raise RegistryError("manifest layer without digest")
    return digests


def _pull_layers(repository: str, digests: list[str], token: str, dest: Path) -> None:
    for digest in digests:
        print(f"Pulling layer {digest}")
        response = _get(f"{REGISTRY_URL}/{repository}/blobs/{digest}", token=token)
        save_and_extract_layer(response.content, dest)


def fetch_docker_token() -> str:
    """Fetch an anonymous pull token for the ubuntu repository."""
    return _fetch_token("ubuntu")


def select_platform_manifest(manifest_list: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the linux/amd64 entry of a manifest list."""
    for entry in manifest_list.get("manifests", []):
        platform = entry.get("platform", {})
        if platform.get("os") == "linux" and platform.get("architecture") == "amd64":
            return entry
    raise RegistryError("No compatible platform found")


def save_and_extract_layer(data: bytes, extract_to: str | os.PathLike[str]) -> None:
    """Unpack a gzip-compressed tar layer into a directory."""
    target = Path(extract_to)
    target.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            if hasattr(tarfile, "tar_filter"):
                archive.extractall(target, filter="tar")
            else:
                archive.extractall(target)
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise RegistryError(f"failed to extract layer: {exc}") from exc


def _container_rootfs(container_id: str) -> Path:
    try:
        home = os.environ["HOME"]
    except KeyError as exc:
        raise RegistryError("HOME is not set") from exc
    return Path(home) / "tug" / "containers" / container_id / "rootfs"


def fetch_manifest(container_id: str) -> None:
    """Pull ubuntu:latest for linux/amd64 into the container's rootfs."""
    token = fetch_docker_token()
    manifest_list = _json(
        _get(f"{REGISTRY_URL}/ubuntu/manifests/{DEFAULT_TAG}", token=token, accept=MANIFEST_MEDIA_TYPE)
    )
    if not isinstance(manifest_list, Mapping):
        raise RegistryError("manifest list is not an object")
    selected = select_platform_manifest(manifest_list)
    digest = selected.get("digest")
    if not isinstance(digest, str):
        raise RegistryError("selected manifest has no digest")
    manifest = _json(
        _get(f"{REGISTRY_URL}/ubuntu/manifests/{digest}", token=token, accept=MANIFEST_MEDIA_TYPE)
    )
    _pull_layers("ubuntu", _layer_digests(manifest), token, _container_rootfs(container_id))


def pull_and_extract_ubuntu_image(container_id: str) -> None:
    """Pull the ubuntu image into the rootfs of the given container."""
    fetch_manifest(container_id)


def pull_and_extract_image(image: str, dest: str | os.PathLike[str]) -> None:
    """Pull ``name[:tag]`` from the library namespace and unpack it into dest."""
    repository, tag = parse_image(image)
    token = _fetch_token(repository)
    manifest = _json(
        _get(f"{REGISTRY_URL}/{repository}/manifests/{tag}", token=token, accept=MANIFEST_MEDIA_TYPE)
    )
    _pull_layers(repository, _layer_digests(manifest), token, Path(dest))