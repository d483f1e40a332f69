"""
Label Setup: in-process label layer.

Stands in for the map's label layer: it owns the committed category list,
knows the attribute fields of the underlying feature table and hands the
categories to the label builder when asked.
"""
import logging

from label_setup.core.labeling.categories import CategoryList, LabelCategory


class LabelLayer:
    def __init__(self, categories: CategoryList = None, fields=(), is_line_layer: bool = False,
                 map_frame=None, on_create_labels=None):
        self.logger = logging.getLogger("LabelLayer")
        if categories is None:
            # 新規レイヤーは全地物を対象とする1カテゴリから始まる
            categories = CategoryList([LabelCategory(name="Category 1")])
        self.categories = categories
        self.fields = list(fields)
        self.is_line_layer = is_line_layer
        self.map_frame = map_frame
        self.on_create_labels = on_create_labels
        self.rebuild_count = 0

    def copy(self) -> CategoryList:
        """Deep copy of the category list for an edit session."""
        return self.categories.copy()

    def copy_properties_from(self, categories: CategoryList):
        self.categories.copy_properties_from(categories)

    def create_labels(self):
        self.rebuild_count += 1
        self.logger.info(f"Rebuilding labels: {len(self.categories)} categories (rebuild #{self.rebuild_count})")
        if self.on_create_labels is not None:
            self.on_create_labels(self)
