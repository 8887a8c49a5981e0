# setup.py
"""Setup script for the Folder Uploader."""

import os

from setuptools import setup, find_packages

setup(
    name="telegram-folder-uploader",
    version="1.0.0",
    description="Resumable folder uploads to Telegram forum topics with checkpoint support",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Folder Uploader Team",
    packages=find_packages(include=["folder_uploader", "folder_uploader.*"]),
    python_requires=">=3.8",
    install_requires=[
        "requests>=2.25.0",
        "urllib3>=1.26.0",
        "Pillow>=8.0.0",
        "tqdm>=4.50.0",
        "python-dotenv>=0.19.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0.0",
            "pytest-cov>=2.10.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "folder-uploader=folder_uploader.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Communications :: Chat",
        "Topic :: System :: Archiving",
    ],
)
