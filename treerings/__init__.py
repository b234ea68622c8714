from treerings.focus import FocusController, FocusState
from treerings.hierarchy import HierarchyNode, collect_source_nodes, flatten_tree, iter_hierarchy
from treerings.hover import HoverBridge
from treerings.layout import PackedNode, PackedTree, font_size_for_depth, pack_hierarchy
from treerings.packing import enclose_circles, pack_siblings
from treerings.rendering import Renderer, fit_label, ink_gradient
from treerings.transitions import Easing, Transition, ViewTransform
from treerings.view import RingsView, ViewParameters
