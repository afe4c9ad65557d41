"""
Confirm the configured OpenAI key works and the vision model is reachable.
Usage: python check_openai_key.py [API_KEY]
       Or set OPENAI_API_KEY in your .env file and run without arguments.
"""
import sys

from openai import OpenAI

from decyph.core.config import settings


def check_key(api_key: str, model: str) -> bool:
    client = OpenAI(api_key=api_key, timeout=settings.openai_timeout_s)
    try:
        client.models.retrieve(model)
        return True
    except Exception as e:
        print(f"[INVALID] {e}")
        return False


if __name__ == "__main__":
    api_key = sys.argv[1] if len(sys.argv) > 1 else (settings.openai_api_key or "")

    if not api_key:
        print("[ERROR] No API key provided. Pass it as an argument or set OPENAI_API_KEY in .env")
        sys.exit(1)

    masked = api_key[:8] + "..." + api_key[-4:]
    print(f"Checking key: {masked} against model {settings.openai_model}")

    if check_key(api_key, settings.openai_model):
        print("[VALID] API key is active and the model is available.")
    else:
        print("[INVALID] API key check failed.")
        sys.exit(1)
