"""Services layer for SoraStudio.

Services implement the generation request path.
Organized by feature:
- prompt: Blocklist matching and LLM prompt processing
- video: Channel adapter and Sora upstream clients
- catalog: Remote model import helpers
- pipeline: End-to-end generation orchestration
"""
