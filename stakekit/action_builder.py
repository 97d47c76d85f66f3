"""
action_builder.py: Module for building the actions that write a rendered plan to disk
"""
import re
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .descriptors import ResourcePlan

KUSTOMIZATION_FILE = "kustomization.yaml"


def manifest_filename(index: int, manifest: Dict[str, Any]) -> str:
    """
    Stable, ordered file name for one manifest: 003-statefulset-erigon.yaml
    """
    kind = manifest["kind"].lower()
    name = re.sub(r"[^a-z0-9.-]+", "-", manifest["metadata"]["name"].lower())
    return f"{index:03d}-{kind}-{name}.yaml"


def _dump(manifest: Dict[str, Any]) -> str:
    return yaml.safe_dump(manifest, default_flow_style=False, sort_keys=False)


class ActionBuilder:
    """
    ActionBuilder: Class responsible for building action plans for rendering
    """

    def __init__(self, plan: ResourcePlan):
        self.plan = plan

    def build_render_actions(self, out_dir: Path) -> List[Dict[str, Any]]:
        """
        Build actions for writing every manifest plus a kustomization index
        :param out_dir: Directory receiving the files
        :return: List of action dictionaries
        """
        # Resolving happens here so reference errors surface before anything is written
        manifests = self.plan.render()
        out_dir = Path(out_dir)
        actions = []

        actions.append({
            "desc": f"Create directory {out_dir}",
            "func": lambda path: path.mkdir(parents=True, exist_ok=True),
            "args": (out_dir,),
        })

        files = []
        for index, manifest in enumerate(manifests):
            filename = manifest_filename(index, manifest)
            files.append(filename)
            actions.append({
                "desc": f"Write {manifest['kind']}/{manifest['metadata']['name']} → {out_dir / filename}",
                "func": self._write,
                "args": (out_dir / filename, _dump(manifest)),
            })

        kustomization = {
            "apiVersion": "kustomize.config.k8s.io/v1beta1",
            "kind": "Kustomization",
            "namespace": self.plan.namespace,
            "resources": files,
        }
        actions.append({
            "desc": f"Generate {out_dir / KUSTOMIZATION_FILE}",
            "func": self._write,
            "args": (out_dir / KUSTOMIZATION_FILE, _dump(kustomization)),
        })
        return actions

    @staticmethod
    def _write(path: Path, content: str):
        path.write_text(content)
