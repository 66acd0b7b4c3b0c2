# Profile and grade views
from .profile import (
    profile,
    grades,
)

# Catalogue course views
from .courses import (
    available_courses,
    enrolled_courses,
    enroll,
    drop,
)

# Supplementary course views
from .supplementary import (
    catalog_search,
    supplementary_list,
    supplementary_enroll,
    supplementary_drop,
    supplementary_access,
)
