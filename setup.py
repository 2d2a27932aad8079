from setuptools import setup

# Read from requirements.txt
with open("requirements.txt") as f:
    required = f.read().splitlines()

setup(
    name="zoom-recording-fetcher",
    version="1.0",
    py_modules=[
        "zoom_recording_fetcher",
        "artifact_planner",
        "console",
        "credentials",
        "fetcher_config",
        "fetcher_errors",
        "meeting_time",
        "notification",
        "zoom_client",
    ],
    python_requires=">=3.9",
    install_requires=required,
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "zoom-recording-fetcher=zoom_recording_fetcher:main",
        ],
    },
)
