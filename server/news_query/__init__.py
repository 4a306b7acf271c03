"""
News Query Compilation Service

Turns the entity references gathered by the news search / alert UI
(organisations, instruments, languages, portfolios and boolean operators)
into one canonical boolean tree, and renders that tree as the filter markup
consumed by the news retrieval and alert services.

Architecture:
    token forest -> normalizer -> compiler -> [extractor, serializer]

Components:
    - models: Token tree and pipeline settings/outputs
    - normalizer: Dedup and same-operator flattening (OperatorStrategy)
    - compiler: Operator binding per OperatorPriority; the single choke point
    - extractor: Category extraction under a per-category descent policy
    - serializer: Filter markup, destination codes, upstream JSON codec
"""
