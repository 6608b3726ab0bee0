"""카탈로그(YAML) 로더 - 인메모리 저장소 초기 데이터 적재

포맷:
    collections:
      - id: X
        urls: [lion_realistic_bw_chest.jpg]
    vectors:
      - id: X
        style: {realistic: 100, bw: 100}
        subject: {lion: 100}
        area: {chest: 100}
"""
import os
from typing import Any, Dict

import yaml

from inkinspot.core.logging import logger
from inkinspot.engine.models import ImageCollection, ImageVector

from .memory import InMemoryImageStore, InMemoryVectorStore


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Catalog must be a mapping: {path}")
    return data


def load_catalog(
    path: str,
    image_store: InMemoryImageStore,
    vector_store: InMemoryVectorStore,
) -> tuple[int, int]:
    """카탈로그 파일을 두 저장소에 적재

    Args:
        path: YAML 파일 경로
        image_store: 컬렉션을 적재할 이미지 저장소
        vector_store: 벡터를 적재할 벡터 저장소

    Returns:
        (적재한 컬렉션 수, 적재한 벡터 수)

    Raises:
        FileNotFoundError: 파일이 없는 경우
        ValueError: 포맷이 잘못된 경우 (음수 가중치 포함)
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Catalog not found: {path}")

    data = _read_yaml(path)

    collections = data.get("collections") or []
    for item in collections:
        image_store.add_collection(
            ImageCollection(id=str(item["id"]), urls=tuple(item.get("urls") or ()))
        )

    vectors = data.get("vectors") or []
    for item in vectors:
        vector_store.add_vector(
            ImageVector(
                id=str(item["id"]),
                style={str(k): float(v) for k, v in (item.get("style") or {}).items()},
                subject={str(k): float(v) for k, v in (item.get("subject") or {}).items()},
                area={str(k): float(v) for k, v in (item.get("area") or {}).items()},
            )
        )

    logger.info(f"Catalog loaded: path={path}, collections={len(collections)}, vectors={len(vectors)}")
    return len(collections), len(vectors)
