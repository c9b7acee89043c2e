"""
Configuration validation and health checks for production use.
Validates API keys, embedding provider configuration, and dependencies.
"""

import importlib
import os
from typing import Any, Dict, List, Tuple, Optional

from .embeddings import API_KEY_ENV_VARS, EmbeddingProviderKind

# Import name and pip package per provider
PROVIDER_DEPENDENCIES = {
    EmbeddingProviderKind.LOCAL: ('sentence_transformers', 'sentence-transformers'),
    EmbeddingProviderKind.OPENAI: ('openai', 'openai'),
    EmbeddingProviderKind.GEMINI: ('google.generativeai', 'google-generativeai'),
}


def validate_api_key(provider: str, api_key: Optional[str] = None) -> Tuple[bool, str]:
    """
    Validate that API key exists for a given provider.

    Args:
        provider: 'openai', 'gemini', or 'local'
        api_key: Optional API key to check (if None, checks env vars)

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        kind = EmbeddingProviderKind.parse(provider)
    except ValueError as e:
        return False, str(e)

    if kind == EmbeddingProviderKind.LOCAL:
        # Local model doesn't need API key
        return True, ""

    if api_key is None:
        env_var = API_KEY_ENV_VARS[kind]
        api_key = os.getenv(env_var)
        if not api_key:
            return False, f"{env_var} environment variable not set. Required for {kind.value} provider."

    if not api_key or api_key.strip() == "":
        return False, f"API key for {kind.value} is empty"

    # Basic format validation
    if kind == EmbeddingProviderKind.OPENAI and not api_key.startswith('sk-'):
        return False, "OpenAI API key format appears invalid (should start with 'sk-')"

    if kind == EmbeddingProviderKind.GEMINI and len(api_key) < 20:
        return False, "Gemini API key format appears invalid (too short)"

    return True, ""


def validate_provider_available(provider: str) -> Tuple[bool, str]:
    """
    Check if provider dependencies are installed.

    Returns:
        Tuple of (is_available, error_message)
    """
    try:
        kind = EmbeddingProviderKind.parse(provider)
    except ValueError as e:
        return False, str(e)

    module_name, package = PROVIDER_DEPENDENCIES[kind]
    try:
        importlib.import_module(module_name)
        return True, ""
    except ImportError:
        return False, f"{package} not installed. Run: pip install {package}"


def validate_config(config: Dict) -> List[str]:
    """
    Validate entire configuration and return list of errors/warnings.

    Args:
        config: Configuration dictionary from config_loader

    Returns:
        List of error/warning messages (empty if all valid)
    """
    errors = []
    warnings = []

    emb_config = config.get('embeddings', {})
    provider = emb_config.get('provider', 'local')

    is_available, msg = validate_provider_available(provider)
    if not is_available:
        errors.append(f"Embeddings Provider '{provider}': {msg}")
    else:
        is_valid, key_msg = validate_api_key(provider)
        if not is_valid:
            errors.append(f"Embeddings Provider '{provider}': {key_msg}")

    model = emb_config.get('model', '')
    if provider == 'openai' and model and 'embedding' not in model.lower():
        warnings.append(f"Warning: Model '{model}' may not be a valid OpenAI embedding model")

    if provider == 'gemini' and model and 'embedding' not in model.lower():
        warnings.append(f"Warning: Model '{model}' may not be a valid Gemini embedding model")

    timeout = emb_config.get('timeout_seconds', 30)
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout < 0):
        errors.append(f"Embedding timeout {timeout} is out of valid range (must be >= 0)")

    eval_config = config.get('evaluation', {})
    decimals = eval_config.get('decimals', 3)
    if not isinstance(decimals, int) or not (0 <= decimals <= 10):
        errors.append(f"Decimals {decimals} is out of valid range [0, 10]")

    max_workers = eval_config.get('max_workers', 4)
    if not isinstance(max_workers, int) or max_workers < 1:
        errors.append(f"max_workers {max_workers} is out of valid range (must be >= 1)")

    return errors + warnings


def health_check() -> Dict[str, Any]:
    """
    Run comprehensive health check of configuration and dependencies.

    Returns:
        Dict with 'status', 'errors', 'warnings', and 'info'
    """
    from .config_loader import load_config

    config = load_config()
    issues = validate_config(config)

    errors = [i for i in issues if not i.startswith('Warning: ')]
    warnings = [i for i in issues if i not in errors]

    status = "healthy" if not errors else "unhealthy"

    info = {
        'embeddings_provider': config.get('embeddings', {}).get('provider', 'unknown'),
        'embeddings_model': config.get('embeddings', {}).get('model', 'unknown'),
        'timeout_seconds': config.get('embeddings', {}).get('timeout_seconds', 'unknown'),
    }

    return {
        'status': status,
        'errors': errors,
        'warnings': warnings,
        'info': info
    }


if __name__ == "__main__":
    result = health_check()

    print("=" * 60)
    print("🔍 CONFIGURATION HEALTH CHECK")
    print("=" * 60)

    print(f"\nStatus: {result['status'].upper()}")

    print("\n📋 Configuration:")
    for key, value in result['info'].items():
        print(f"   {key}: {value}")

    if result['errors']:
        print(f"\n❌ Errors ({len(result['errors'])}):")
        for error in result['errors']:
            print(f"   - {error}")

    if result['warnings']:
        print(f"\n⚠️  Warnings ({len(result['warnings'])}):")
        for warning in result['warnings']:
            print(f"   - {warning}")

    if not result['errors'] and not result['warnings']:
        print("\n✅ All checks passed!")

    print("=" * 60)
