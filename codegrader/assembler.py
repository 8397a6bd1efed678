"""
Combine a user's solution with the problem's per-language driver code.
"""
import logging
import re
from typing import Callable, Dict, Mapping, Optional


logger = logging.getLogger(__name__)

# Data-structure helpers the problems commonly ship; never the entry class.
JAVA_HELPER_CLASSES = {
    'Node', 'TreeNode', 'ListNode', 'DoublyListNode', 'Point', 'Pair', 'Interval', 'Edge',
}

JAVA_CLASS_RE = re.compile(r'(public\s+)?class\s+(\w+)')

AssemblyStrategy = Callable[[str], str]


def normalize_language(language: str) -> str:
    key = (language or '').strip().lower()
    return 'c++' if key == 'cpp' else key


def rename_java_entry_class(user_code: str) -> str:
    """Make the user's main class the non-public ``Solution`` the driver expects."""
    matches = list(JAVA_CLASS_RE.finditer(user_code))

    if any(m.group(2) == 'Solution' for m in matches):
        return re.sub(r'public\s+class\s+Solution\b', 'class Solution', user_code, count=1)

    target = None
    for m in matches:
        if m.group(1) and m.group(2) not in JAVA_HELPER_CLASSES:
            target = m.group(2)
            break
    if target is None:
        for m in matches:
            if m.group(2) not in JAVA_HELPER_CLASSES:
                target = m.group(2)
                break
    if target is None:
        return user_code

    logger.debug('Renaming Java class %s to Solution', target)
    name = re.escape(target)
    code = re.sub(rf'(public\s+)?class\s+{name}\b', 'class Solution', user_code, count=1)
    return re.sub(rf'\b{name}\s*\(', 'Solution(', code)


def normalize_indentation(driver: str) -> str:
    lines = driver.split('\n')
    first = next((line for line in lines if line.strip()), None)
    if first is None:
        return driver
    indent = first[:len(first) - len(first.lstrip())]
    if not indent:
        return driver
    return '\n'.join(line[len(indent):] if line.startswith(indent) else line for line in lines)


STRATEGIES: Dict[str, AssemblyStrategy] = {
    'java': rename_java_entry_class,
}


def assemble(user_code: str, driver_templates: Optional[Mapping[str, str]], language: str) -> str:
    lang = normalize_language(language)
    templates = driver_templates or {}
    driver = templates.get(lang) or templates.get((language or '').strip().lower())
    if not driver or not driver.strip():
        logger.info('No driver code for %s, using user code directly', lang)
        return user_code

    prepare = STRATEGIES.get(lang)
    code = prepare(user_code) if prepare else user_code
    return f'{code}\n\n{normalize_indentation(driver).strip()}'
