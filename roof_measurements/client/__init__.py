"""
Client module for vision inference service communication.
"""

from roof_measurements.client.vision_client import VisionClient, to_image_url


__all__ = [
    "VisionClient",
    "to_image_url",
]
