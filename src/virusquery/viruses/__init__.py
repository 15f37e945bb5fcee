"""Virus configurations and the virus registry.

Import from the submodules directly (``virusquery.viruses.registry``); this
package module stays empty so that configuration models can be imported
without loading the built-in viruses.
"""
