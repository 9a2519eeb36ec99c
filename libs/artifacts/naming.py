"""
Date                    Author                          Change Details
17-10-2026              QA Tooling                      Artifact File / Class Names From Test Case Title
"""
import re

from libs.artifacts.safe_path import make_safe_basename
from libs.dataclass.conceptual_objects import ArtifactNames


def slugify(name: str) -> str:
    return re.sub(r"(^-|-$)", "", re.sub(r"[^a-z0-9]+", "-", name.strip().lower()))


def pascal_case(name: str) -> str:
    words = re.sub(r"[^a-zA-Z0-9 ]+", " ", name).split()
    return "".join(w[:1].upper() + w[1:] for w in words)


def artifact_names_for(title: str) -> ArtifactNames:
    slug = slugify(title) or "test-case"
    class_base = pascal_case(title) or "TestCase"
    if class_base[0].isdigit():
        class_base = "Tc" + class_base
    return ArtifactNames(
        title=title,
        slug=slug,
        class_base=class_base,
        page_class=f"{class_base}Page",
        describe_name=title.strip(),
        spec_basename=make_safe_basename(f"{slug}.spec.ts"),
        page_basename=make_safe_basename(f"{slug}.page.ts"),
        locators_basename=make_safe_basename(f"{slug}.json"),
    )
