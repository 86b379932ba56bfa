#!/usr/bin/env python3
"""
Send a prompt to the inference service and print the cleaned-up response.
"""
import logging
import os
import sys

from modellease_sdk import InferenceGateway, ModelLeaseError
from modellease_sdk.config import DEFAULT_INFERENCE_URL


def main():
    logging.basicConfig(level=logging.DEBUG if os.environ.get("DEBUG") else logging.INFO)

    prompt = " ".join(sys.argv[1:]) or "Hello, how are you today?"
    gateway = InferenceGateway(
        os.environ.get("HUGGINGFACE_API_KEY"),
        model_url=os.environ.get("INFERENCE_URL", DEFAULT_INFERENCE_URL)
    )

    try:
        print("AI Model Output:")
        print(gateway.infer(prompt))
    except ModelLeaseError as e:
        print(f"Failed to get AI response: {e}")
    finally:
        gateway.close()


if __name__ == "__main__":
    main()
