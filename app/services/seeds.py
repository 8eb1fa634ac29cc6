"""
Seed filesystems.

Seeds are described as nested dicts (string value = file content, dict
value = directory) and turned into fresh FileSystemState objects. Every
call builds new nodes, so two filesystems created from the same seed never
share state.

Seed files are trusted: their extension is recorded as-is and not checked
against the shell's allow-list (Debian binaries such as /bin/sh have none).
"""

from datetime import datetime, timezone
from typing import Dict, Union

from app.config import HOST_HOME
from app.schemas.filesystem import (
    DirectoryNode, FileNode, FileSystemState, create_directory, get_file_extension
)
from app.services.paths import join_path

SeedConfig = Dict[str, Union[str, "SeedConfig"]]


POD_EXAMPLE_YAML = """apiVersion: v1
kind: Pod
metadata:
  name: nginx
  namespace: default
spec:
  containers:
  - name: nginx
    image: nginx:latest
    ports:
    - containerPort: 80"""

DEPLOYMENT_EXAMPLE_YML = """apiVersion: apps/v1
kind: Deployment
metadata:
  name: nginx-deployment
  namespace: default
spec:
  replicas: 3
  selector:
    matchLabels:
      app: nginx
  template:
    metadata:
      labels:
        app: nginx
    spec:
      containers:
      - name: nginx
        image: nginx:1.25
        ports:
        - containerPort: 80"""

SERVICE_EXAMPLE_JSON = """{
  "apiVersion": "v1",
  "kind": "Service",
  "metadata": {
    "name": "nginx-service",
    "namespace": "default"
  },
  "spec": {
    "selector": {
      "app": "nginx"
    },
    "ports": [
      {
        "protocol": "TCP",
        "port": 80,
        "targetPort": 80
      }
    ],
    "type": "ClusterIP"
  }
}"""

EXAMPLE_MANIFESTS: SeedConfig = {
    "pod-example.yaml": POD_EXAMPLE_YAML,
    "deployment-example.yml": DEPLOYMENT_EXAMPLE_YML,
    "service-example.json": SERVICE_EXAMPLE_JSON,
}

DEBIAN_ETC: SeedConfig = {
    "hostname": "container-hostname",
    "hosts": "127.0.0.1\tlocalhost\n::1\t\tlocalhost ip6-localhost ip6-loopback",
    "passwd": "root:x:0:0:root:/root:/bin/bash",
    "resolv.conf": "nameserver 8.8.8.8\nnameserver 8.8.4.4",
}

DEBIAN_FILESYSTEM: SeedConfig = {
    "bin": {
        "sh": "#!/bin/sh\n# Simulated shell binary",
        "bash": "#!/bin/bash\n# Simulated bash binary",
        "ls": "#!/bin/sh\n# Simulated ls binary",
        "cat": "#!/bin/sh\n# Simulated cat binary",
        "grep": "#!/bin/sh\n# Simulated grep binary",
        "ps": "#!/bin/sh\n# Simulated ps binary",
        "env": "#!/bin/sh\n# Simulated env binary",
    },
    "etc": DEBIAN_ETC,
    "home": {},
    "root": {},
    "tmp": {},
    "var": {
        "log": {},
        "run": {},
    },
    "usr": {
        "bin": {},
        "local": {},
        "lib": {},
    },
}

HOST_FILESYSTEM: SeedConfig = {
    **DEBIAN_FILESYSTEM,
    "etc": {
        **DEBIAN_ETC,
        "passwd": "root:x:0:0:root:/root:/bin/bash\nkube:x:1000:1000:kube:/home/kube:/bin/bash",
    },
    "home": {
        "kube": {
            "examples": EXAMPLE_MANIFESTS,
        },
    },
}

EXAMPLE_FILESYSTEM: SeedConfig = {
    "examples": EXAMPLE_MANIFESTS,
    "manifests": {},
}


def _build_children(directory: DirectoryNode, config: SeedConfig, now: datetime) -> None:
    for name, value in config.items():
        path = join_path(directory.path, name)
        if isinstance(value, str):
            directory.children[name] = FileNode(
                name=name,
                path=path,
                content=value,
                extension=get_file_extension(name),
                created_at=now,
                modified_at=now
            )
        else:
            child = create_directory(name, path)
            _build_children(child, value, now)
            directory.children[name] = child


def build_state(config: SeedConfig, current_path: str = "/") -> FileSystemState:
    """
    Build a filesystem state from a nested seed description.

    Args:
        config: Mapping of names to file contents (str) or subdirectories (dict)
        current_path: Working directory of the new state

    Returns:
        Fresh FileSystemState
    """
    root = create_directory("root", "/")
    _build_children(root, config, datetime.now(timezone.utc))
    return FileSystemState(current_path=current_path, tree=root)


def debian_filesystem() -> FileSystemState:
    """Debian-like layout used for container shells"""
    return build_state(DEBIAN_FILESYSTEM)


def host_filesystem() -> FileSystemState:
    """Debian layout with the kube user and example manifests, starting in its home"""
    return build_state(HOST_FILESYSTEM, current_path=HOST_HOME)


def example_filesystem() -> FileSystemState:
    """Minimal layout: /examples with sample manifests and an empty /manifests"""
    return build_state(EXAMPLE_FILESYSTEM)
