"""inkinspot - 타투 이미지 검색 서비스"""

__version__ = "1.0.0"
