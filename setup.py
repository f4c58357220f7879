"""setuptools 打包配置。"""

from __future__ import annotations

from setuptools import find_packages, setup


VERSION = "0.1.0"


setup(
    name="avopp",
    version=VERSION,
    description="学业任务跟踪 API：科目、活动与紧迫度排名",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    include_package_data=True,
    install_requires=[
        "fastapi>=0.100",
        "uvicorn>=0.22",
        "pydantic>=2.0",
        "tzdata",
    ],
    extras_require={
        "test": [
            "pytest>=7",
            "httpx>=0.24",
        ],
    },
)
