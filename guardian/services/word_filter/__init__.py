"""
Guardian - Word Filter Package
==============================

Per-guild NG-word rules and the fixed bilingual insult list.

Modules are imported directly (guardian.services.word_filter.ngwords,
...insults) since the settings service depends on the models here.
"""
