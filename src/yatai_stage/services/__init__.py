"""Business logic services for the Yatai Stage application.

Modules are imported directly (``from yatai_stage.services.timeline import
TimelineEngine``); the repository layer depends on ``filters`` so this
package does not re-export anything.
"""
