"""Action, step and step result models and the github and job contexts."""