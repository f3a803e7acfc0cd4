# FILE: launchpad/services/frameworks.py
from typing import Dict, List, Optional

# Default commands per framework preset, as offered by the create-project form.
FRAMEWORK_PRESETS: Dict[str, Dict[str, str]] = {
    "nextjs": {"name": "Next.js", "build": "npm run build", "install": "npm install", "output": ".next"},
    "create-react-app": {"name": "React", "build": "npm run build", "install": "npm install", "output": "build"},
    "vue": {"name": "Vue.js", "build": "npm run build", "install": "npm install", "output": "dist"},
    "nuxt": {"name": "Nuxt.js", "build": "npm run generate", "install": "npm install", "output": "dist"},
    "angular": {"name": "Angular", "build": "ng build", "install": "npm install", "output": "dist"},
    "svelte": {"name": "Svelte", "build": "npm run build", "install": "npm install", "output": "public"},
    "static": {"name": "Static", "build": "", "install": "", "output": ""},
    "express": {"name": "Node.js", "build": "", "install": "npm install", "output": ""},
}


def get_preset(framework: Optional[str]) -> Optional[Dict[str, str]]:
    """Preset for a framework id; free-text frameworks have none."""
    if not framework:
        return None
    return FRAMEWORK_PRESETS.get(framework.strip().lower())


def list_presets() -> List[Dict[str, str]]:
    return [
        {
            "id": fid,
            "name": p["name"],
            "buildCommand": p["build"],
            "installCommand": p["install"],
            "outputDirectory": p["output"],
        }
        for fid, p in FRAMEWORK_PRESETS.items()
    ]
